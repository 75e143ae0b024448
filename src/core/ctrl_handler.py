import logging
import signal

log = logging.getLogger("effect.renderer")


class CtrlCHandler:
    """
    Handle Ctrl+C so the preview stops the effect cleanly and
    finalizes its telemetry session.
    """
    def __init__(self):
        self.should_stop = False
        signal.signal(signal.SIGINT, self._signal_handler)

    def _signal_handler(self, sig, frame):
        """Callback executed when Ctrl+C is detected"""
        log.warning("[Main] Interrupt signal detected, closing cleanly...")
        self.should_stop = True
