"""!
@brief LogiCam Control package root.
@details Modules under this namespace drive a UVC webcam through
``v4l2-ctl``: the settings catalog and its dependency and busy policies, the
adjustment engine, the apply pipeline, dialogs and notifications, and the
terminal front-end that ties them together.
"""

__all__ = [
    "main",
    "catalog",
    "dependencies",
    "lockout",
    "adjust",
    "apply",
    "dialogs",
    "notifications",
    "controller",
    "models",
    "webcam",
    "constants",
    "confirm",
    "logging_ext",
    "command_runner",
    "version",
    "app_state",
    "tui",
    "tui_render",
    "tui_helpers",
]
