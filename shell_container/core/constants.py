"""Constants used throughout the Shell Container application."""


# Environment variables
IMAGE_ENV_VAR = "DOCKER_IMAGE"
CONTEXT_DIR_ENV_VAR = "SHELL_CONTAINER_CONTEXT_DIR"
CONFIG_FILE_ENV_VAR = "SHELL_CONTAINER_CONFIG"

# Configuration file
CONFIG_FILE_NAME = "shell_container.json"

# Logging
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
