"""
ScreenMe - screenshot capture and annotation tool.

This package contains the application modules:
- core: Application core, capture, tray and hotkey services
- editor: Full-screen screenshot display and its annotation engine
- ui: Toolbar widgets
- services: Application services (config, logging, file paths)
"""

__version__ = "0.1.0"
