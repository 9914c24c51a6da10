"""
Application Initialization
==========================
This module wires the model, the controllers and the main window together
and starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Opens the shared profile collection.
2. Creates the session and the profile history, and connects them.
3. Passes everything into the Main Window.
4. Signs in, which connects the history and loads the saved profiles.
"""
import logging
import sys

from fluidshape.application import create_app
from fluidshape.config import DEFAULT_HISTORY_PATH
from fluidshape.controller.collections import H5ProfileCollection, InMemoryProfileCollection
from fluidshape.controller.session import SyncSession
from fluidshape.logging_config import setup_logging
from fluidshape.model.errors import RemoteOperationError
from fluidshape.model.history import ProfileHistoryCache
from fluidshape.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def main() -> None:
    # 1. Setup Logging (use logging.DEBUG to see every reconciliation)
    setup_logging(level=logging.INFO)

    # 2. Create the Qt Application
    app = create_app()

    # 3. Open the profile collection
    try:
        collection = H5ProfileCollection(DEFAULT_HISTORY_PATH)
    except RemoteOperationError as e:
        logger.warning(f"Profile file unavailable ({e}), history will not be persisted.")
        collection = InMemoryProfileCollection()

    # 4. Session + history
    session = SyncSession()
    history = ProfileHistoryCache(collection)
    session.identity_changed.connect(history.set_identity)

    # 5. Initialize the Main Window
    window = MainWindow(session, history)
    window.show()

    session.sign_in()

    # 6. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
