import argparse

from .config import loadConfig, setupLogging
from .UI import UI

def main() -> None:
    parser = argparse.ArgumentParser(
        prog='time-motion-study',
        description='Record time-and-motion study laps in the terminal.',
    )
    parser.add_argument('--storage', help='JSON file holding the study state.')
    parser.add_argument('--export', help='Where the .xlsx export is written.')
    parser.add_argument('--study-name', help='Window title and sheet name.')
    parser.add_argument('--log-file', help='Log to this file.')
    args = parser.parse_args()

    config = loadConfig(
        storage_path=args.storage,
        export_path=args.export,
        study_name=args.study_name,
        log_file=args.log_file,
    )
    setupLogging(config)
    UI(config).run()

if __name__ == '__main__':
    main()
