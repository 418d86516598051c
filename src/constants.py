"""
Global constants for PM2 Save Editor.
Contains build info and path configuration.
"""

import os

# **************************************************************** #
#                       Build Info                                     #
# **************************************************************** #
APP_NAME = "PM2 Save Editor"
APP_VERSION = "0.1.0"

# **************************************************************** #
#                       Environment Detection                        #
# **************************************************************** #
DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))

# **************************************************************** #
#                       Path Configuration                           #
# **************************************************************** #
if DEV_MODE:
    TEMP_LOG_DIR = os.path.join(SCRIPT_DIR, "..", "workdir")
    CONFIG_FILE = os.path.join(SCRIPT_DIR, "..", "workdir", "config.json")
else:
    TEMP_LOG_DIR = os.path.join(os.path.expanduser("~"), ".pm2_save_editor")
    CONFIG_FILE = os.path.join(TEMP_LOG_DIR, "config.json")

LOG_FILE = os.path.join(TEMP_LOG_DIR, "error.log")

# Save files shipped with the game use this extension
SAVE_FILE_EXTENSION = ".GNX"
