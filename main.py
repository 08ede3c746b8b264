"""
Random Shape Overlay - Main Entry Point

Loads a background image, opens a fixed-size window over it and redraws a
batch of random translucent shapes on a fixed cadence until a key is pressed.
"""
import argparse
import sys

from PySide6.QtWidgets import QApplication

from core.animation import AnimationManager, EasingCurve
from core.constants.timing import ANIMATION_FPS
from core.events import EventSystem, EventType
from core.logging.logger import setup_logging, get_logger
from core.settings.settings_manager import SettingsManager
from core.threading.manager import ThreadManager
from engine.config import OverlayConfig
from engine.errors import BackgroundLoadError, ConfigurationError
from engine.overlay_driver import OverlayDriver
from engine.shapes import CanvasGeometry
from ui.overlay_window import OverlayWindow
from utils.image_loader import ImageLoader
from versioning import APP_DESCRIPTION, APP_NAME, APP_ORGANIZATION, APP_VERSION

logger = get_logger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=APP_NAME, description=APP_DESCRIPTION)
    parser.add_argument('--image', help="Background image path or http(s) URL")
    parser.add_argument('--shapes', type=int, help="Shapes per batch")
    parser.add_argument('--interval', type=float, help="Seconds between generations")
    parser.add_argument('--fade', type=float, help="Cross-fade duration in seconds (0 disables)")
    parser.add_argument('--easing', choices=[curve.value for curve in EasingCurve],
                        help="Easing curve for the cross-fade")
    parser.add_argument('--seed', type=int, help="Seed for a reproducible shape sequence")
    parser.add_argument('-d', '--debug', action='store_true', help="Debug logging to console")
    parser.add_argument('-v', '--verbose', action='store_true', help="Per-shape debug logging")
    parser.add_argument('--version', action='version', version=f"{APP_NAME} {APP_VERSION}")
    return parser


def run_overlay(app: QApplication, args: argparse.Namespace) -> int:
    """Build the component graph, show the window and run the event loop."""
    settings = SettingsManager()
    config = OverlayConfig.from_settings(settings).with_overrides(
        shape_count=args.shapes,
        interval_seconds=args.interval,
        fade_seconds=args.fade,
        seed=args.seed,
        fade_easing=EasingCurve(args.easing) if args.easing else None,
    )
    location = args.image or settings.get('overlay.background')

    background = ImageLoader.load_background(location)
    geometry = CanvasGeometry.from_background(background)

    thread_manager = ThreadManager()
    animation_manager = AnimationManager(fps=ANIMATION_FPS)
    event_system = EventSystem()

    driver = OverlayDriver.create(config, geometry, thread_manager, animation_manager,
                                  event_system=event_system)
    window = OverlayWindow(background, driver.compositor)

    shut_down = False

    def shutdown() -> None:
        nonlocal shut_down
        if shut_down:
            return
        shut_down = True
        logger.info("Shutting down overlay")
        driver.stop()
        animation_manager.cleanup()
        thread_manager.shutdown(wait=True)
        logger.info("Thread pool stats: %s", thread_manager.get_pool_stats())

    def on_exit_requested() -> None:
        event_system.publish(EventType.EXIT_REQUEST, source=window)
        shutdown()
        app.quit()

    window.exit_requested.connect(on_exit_requested)
    app.aboutToQuit.connect(shutdown)

    window.show()
    driver.start(immediate=True)
    return app.exec()


def main() -> int:
    """Main entry point for the overlay application."""
    args = build_arg_parser().parse_args()
    setup_logging(debug=args.debug, verbose=args.verbose)

    logger.info("=" * 60)
    logger.info("%s %s Starting", APP_NAME, APP_VERSION)
    logger.info("=" * 60)

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_ORGANIZATION)
    app.setApplicationVersion(APP_VERSION)

    try:
        exit_code = run_overlay(app, args)
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        exit_code = 1
    except BackgroundLoadError as e:
        logger.error("Cannot start without a background: %s", e)
        exit_code = 1
    except Exception as e:
        logger.exception(f"Fatal error in main: {e}")
        exit_code = 1

    logger.info("=" * 60)
    logger.info(f"{APP_NAME} Exiting (code={exit_code})")
    logger.info("=" * 60)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
