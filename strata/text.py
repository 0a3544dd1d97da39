"""Centralized user-facing text for Strata."""

from __future__ import annotations

class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"
    TABLE_HEADER = "bold magenta"


class Messages:
    APP_HELP = "Strata – compile layered config folders into a cached artifact."
    HELP_RELATIVE_PATH = "Folder path, relative to each root, whose files are collected."
    HELP_ROOT = "Base root directory."
    HELP_OVERRIDE = "Override root directory; its files replace base files with the same relative path."
    HELP_PATTERN = "File name glob to collect (repeatable). Defaults to the configured patterns."
    HELP_REGEX = "Treat --pattern values as regular expressions instead of globs."
    HELP_MAX_DEPTH = "Maximum nesting level of collected files (-1 = unlimited)."
    HELP_TREE = "Group results by sub-directory instead of a flat sorted list."
    HELP_FORMAT = "Output format."
    HELP_CACHE = "Path of the cache artifact."
    HELP_DEBUG = "Track resources and validate them on each run (debug mode)."
    HELP_FORCE = "Rebuild the cache even when it is fresh."
    HELP_LOG_LEVEL = "Logging level for diagnostic output."
    HELP_SET_DEBUG = "Persist the default debug mode (true/false)."
    HELP_SET_MAX_DEPTH = "Persist the default maximum nesting level."
    HELP_SET_PATTERN = "Persist a default file name glob (repeatable)."
    HELP_CLEAR_PATTERNS = "Remove the stored default patterns."
    HELP_SET_FLAT = "Persist the default result structure (true = flat, false = tree)."
    HELP_SET_LOG_LEVEL = "Persist the default logging level."
    HELP_SHOW_CONFIG = "Show current configuration."

    ERROR_CONFIG_NOT_VALID = 'The config "{path}" is not valid. Expected a list or a mapping.'
    ERROR_CONFIG_NOT_SERIALIZABLE = 'The config "{path}" cannot be serialized: {reason}'
    ERROR_CONFIG_JSON_INVALID = "Config JSON must be an object."
    ERROR_CONFIG_VALUE_INVALID = "Config value for {field} is invalid."
    ERROR_BOOLEAN_INVALID = "Invalid boolean value: {value}. Use true/false."
    ERROR_MAX_DEPTH_INVALID = "Maximum depth must be -1 or greater than 0."
    ERROR_LOG_LEVEL_INVALID = "Invalid logging level: {value}"
    ERROR_PATTERN_INVALID = "Invalid pattern: {reason}"

    INFO_SCAN_EMPTY = "Nothing found for {path}."
    INFO_BUILD_RUNNING = "Building cache {path}..."
    INFO_BUILD_SAVED = "Cache saved to {path} ({files} file{plural})."
    INFO_BUILD_UP_TO_DATE = "Cache {path} is fresh; nothing to do."
    INFO_BUILD_EMPTY = "No files found; an empty cache was saved to {path}."
    INFO_CHECK_FRESH = "Cache {path} is fresh."
    INFO_CHECK_STALE = "Cache {path} is stale."
    INFO_CHECK_MISSING = "Cache {path} does not exist."
    INFO_CHECK_SUMMARY = (
        "Mode: {mode}\n"
        "Generated: {generated}\n"
        "Tracked resources: {resources}"
    )
    INFO_CLEARED = "Removed cache {path}."
    INFO_CLEAR_NONE = "No cache found at {path}."
    INFO_DEBUG_SET = "Default debug mode set to {value}."
    INFO_MAX_DEPTH_SET = "Default maximum depth set to {value}."
    INFO_PATTERNS_SET = "Default patterns set to {value}."
    INFO_PATTERNS_CLEARED = "Default patterns cleared."
    INFO_FLAT_SET = "Default structure set to {value}."
    INFO_LOG_LEVEL_SET = "Default logging level set to {value}."
    INFO_CONFIG_SUMMARY = (
        "Debug mode: {debug}\n"
        "Maximum depth: {max_depth}\n"
        "Patterns: {patterns}\n"
        "Structure: {structure}\n"
        "Log level: {log_level}"
    )
    INFO_NO_CONFIG_CHANGES = "No configuration changes requested; use --show to display settings."

    TABLE_TITLE = "Strata folder content"
    TABLE_HEADER_INDEX = "#"
    TABLE_HEADER_LAYER = "Layer"
    TABLE_HEADER_PATH = "File path"
