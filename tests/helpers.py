"""Shared test helpers for TimeFocus."""

from timefocus.timer.engine import TimerEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


def run_session(engine: TimerEngine) -> None:
    """Start the current mode and tick it down to zero."""
    engine.start()
    for _ in range(engine.remaining):
        engine.tick()


def settle(engine: TimerEngine) -> None:
    """Fire the deferred arm without waiting for the real delay."""
    assert engine._arm_timer.isActive()
    engine._arm_timer.stop()
    engine._arm_pending()


def complete_and_settle(engine: TimerEngine) -> None:
    run_session(engine)
    settle(engine)
