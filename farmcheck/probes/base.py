"""Abstract base probe."""

import logging
import time
from abc import ABC, abstractmethod

from farmcheck.models import Finding

logger = logging.getLogger(__name__)


class Probe(ABC):
    name: str = "base"

    @abstractmethod
    def probe(self) -> Finding | None:
        """Inspect the target and return a finding, or None when there is nothing to report."""

    def _timed_probe(self) -> Finding | None:
        logger.info("Running %s probe", self.name)
        start = time.monotonic()
        finding = self.probe()
        logger.info("Finished %s probe in %.3fs", self.name, time.monotonic() - start)
        return finding
