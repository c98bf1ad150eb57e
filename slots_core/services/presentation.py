import logging

from slots_core.schemas import BonusSpinResultSchema, SpinOutcomeSchema

logger = logging.getLogger(__name__)


class SpinPresenter:
    """Receives immutable spin snapshots. Default hooks do nothing."""

    def on_spin(self, outcome):
        pass

    def on_bonus_spin(self, result):
        pass

    def on_bonus_complete(self, total_cents):
        pass


class LoggingPresenter(SpinPresenter):
    """Dumps every snapshot through the marshmallow schemas at DEBUG level."""

    def __init__(self):
        self._spin_schema = SpinOutcomeSchema()
        self._bonus_schema = BonusSpinResultSchema()

    def on_spin(self, outcome):
        logger.debug(f"Spin: {self._spin_schema.dump(outcome)}")

    def on_bonus_spin(self, result):
        logger.debug(f"Bonus spin {result.spin_index}/{result.total_spins}: {self._bonus_schema.dump(result)}")

    def on_bonus_complete(self, total_cents):
        logger.debug(f"Bonus session complete, total {total_cents} cents")
