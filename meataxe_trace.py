#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Indented tracing of the recursive decomposition.

The indentation level lives in an immutable ``TraceContext`` that every
recursive call receives explicitly; ``nested()`` hands a deeper copy to the
callee, so returning from a branch restores the caller's level on every exit
path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

_LOGGER_NAME = "rational_meataxe"


def configure_logging(level: int = logging.DEBUG) -> None:
    """Inject a default handler only when none is configured, to avoid polluting host apps."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="[%(levelname)s] %(name)s: %(message)s",
        )
    logging.getLogger(_LOGGER_NAME).setLevel(level)


@dataclass(frozen=True)
class TraceContext:
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(_LOGGER_NAME))
    depth: int = 0
    indent: str = "  "

    def nested(self) -> "TraceContext":
        return replace(self, depth=self.depth + 1)

    @property
    def enabled(self) -> bool:
        return self.logger.isEnabledFor(logging.DEBUG)

    def log(self, msg: str, *args: Any) -> None:
        if self.enabled:
            self.logger.debug(self.indent * self.depth + msg, *args)

    def matrix(self, label: str, matrix: Any) -> None:
        """Log a matrix row by row below ``label``."""
        if not self.enabled:
            return
        self.log("%s", label)
        for row in matrix.rows():
            self.log("  [%s]", " ".join(str(x) for x in row))
