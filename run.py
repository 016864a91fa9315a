# run.py
import logging
import signal
import threading

from reservation_client.observability import configure_logging
from reservation_client.shell import ClientShell

if __name__ == "__main__":
    # Runs the notification pollers for the session stored on this machine
    # and logs every alert they raise until interrupted.
    configure_logging()
    logger = logging.getLogger("reservation_client.run")

    shell = ClientShell()
    shell.notifications.subscribe(lambda alert: logger.info("%s: %s", alert.title, alert.message))

    stopped = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stopped.set())
    signal.signal(signal.SIGTERM, lambda *_: stopped.set())

    if shell.on_session_changed() is None:
        logger.warning("Log in first; no session found at %s", shell.session_store.path)
    else:
        stopped.wait()
    shell.stop()
