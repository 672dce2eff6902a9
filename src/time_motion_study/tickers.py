import logging
import typing as tp

log = logging.getLogger(__name__)

class Handle(tp.Protocol):
    def stop(self) -> None: ...

Schedule = tp.Callable[[float, tp.Callable[[], None]], Handle]

class Tickers:
    '''
    One repeating callback per key. `schedule` has the shape of
    `textual.app.App.set_interval`.
    '''
    def __init__(self, schedule: Schedule, interval: float) -> None:
        self.schedule = schedule
        self.interval = interval
        self.__handles: dict[str, Handle] = {}

    def start(self, key: str, callback: tp.Callable[[], None]) -> None:
        self.cancel(key)
        self.__handles[key] = self.schedule(self.interval, callback)
        log.debug('ticker started: %s', key)

    def cancel(self, key: str) -> bool:
        handle = self.__handles.pop(key, None)
        if handle is None:
            return False
        handle.stop()
        log.debug('ticker cancelled: %s', key)
        return True

    def cancelAll(self) -> None:
        for key in [*self.__handles]:
            self.cancel(key)

    def isTicking(self, key: str) -> bool:
        return key in self.__handles

    def keys(self) -> list[str]:
        return [*self.__handles]

    def __len__(self) -> int:
        return len(self.__handles)
