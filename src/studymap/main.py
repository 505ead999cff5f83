"""
Application Initialization
==========================
This module builds the demo study map and starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Sets up logging from the command line flags.
2. Instantiates the data (a synthetic study forest).
3. Instantiates the Map Window (View) and passes the data into it.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from PySide6.QtCore import QCoreApplication
from PySide6.QtWidgets import QApplication

from studymap.demo import make_forest
from studymap.logging_config import setup_logging
from studymap.view.main_window import VISIBLE_APP_NAME, MapWindow

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="studymap", description="Interactive study map demo.")
    parser.add_argument("--debug", action="store_true", help="log at DEBUG level")
    parser.add_argument("--log-file", default=None, help="also write the log to this file")
    parser.add_argument("--groups", type=int, default=4, help="number of subjects to generate")
    parser.add_argument("--seed", type=int, default=None, help="random seed for data and layout")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)

    # 2. Create the Qt Application
    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")
    QCoreApplication.setApplicationName(VISIBLE_APP_NAME)
    app = QApplication.instance() or QApplication(sys.argv[:1])

    # 3. Initialize the Data
    nodes, links = make_forest(n_subjects=args.groups, seed=args.seed)

    # 4. Initialize the Main Window, passing the data
    window = MapWindow(nodes, links, seed=args.seed)
    window.show()

    # 5. Start Event Loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
