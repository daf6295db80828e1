import logging

from config import ApplicationConfig
from src.api.hooks.pre_token_generation import pre_token_generation_handler

# Lambda entry point for the user pool "Pre token generation" trigger:
#   handler.pre_token_generation
logging.getLogger().setLevel(ApplicationConfig.LOG_LEVEL)

pre_token_generation = pre_token_generation_handler
