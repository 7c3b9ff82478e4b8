"""
Startup and teardown of a navigator session.

    navigator = await start_navigator(feed, editors, "config.json")
    ...
    await stop_navigator(navigator)
"""
from typing import Optional

from loguru import logger

from .core.config import ConfigManager
from .core.logging import setup_logging
from .ui.navigator import EditorManager, PaneFeed, ProjectNavigator, ViewSettingsStore


async def start_navigator(feed: PaneFeed,
                          editors: EditorManager,
                          config_path: Optional[str] = "config.json",
                          with_logging: bool = True,
                          settings_store: Optional[ViewSettingsStore] = None) -> ProjectNavigator:
    """
    Load the configuration, set up logging from its general section,
    restore the saved navigator state and initialize the navigator.

    Must be awaited on the loop that will drive the navigator UI.
    """
    config = ConfigManager(config_path)
    if with_logging:
        general = config.data.general
        setup_logging(general.debug_mode, general.log_dir)
    logger.info(f"Starting navigator (config={config_path})")

    navigator = ProjectNavigator(config, feed, editors, settings_store=settings_store)
    navigator.load_from_file()
    await navigator.initialize()
    return navigator


async def stop_navigator(navigator: ProjectNavigator) -> bool:
    """Save the navigator state file and shut the navigator down."""
    saved = navigator.save_to_file()
    await navigator.shutdown()
    return saved
