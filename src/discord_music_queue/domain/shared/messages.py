"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Media Item Validation Errors
    EMPTY_QUERY = "Query cannot be empty"
    INVALID_QUEUE_POSITION = "Queue position cannot be negative"

    # Player Errors
    NO_AUDIO_SINK = "No audio sink is attached to the player"
    PLAYBACK_FAILED = "Playback failed: {error}"

    # Stream Errors
    STREAM_OPEN_FAILED = "Could not start the audio stream: {error}"
    STREAM_PROBE_FAILED = "Could not read the audio stream: {error}"
    STREAM_ENDED_EARLY = "Stream ended before any audio was produced"
    NO_URL_IN_INFO_DICT = "No URL found in info dict"

    # Configuration Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Media Items
    ITEM_CALLBACK_FAILED = "%s callback failed for '%s'"
    ITEM_CALLBACK_FAILED_ASYNC = "%s callback for '%s' raised: %r"
    RESOURCE_PROCESS_CLEANUP_ERROR = "Error killing stream process: %r"
    RESOURCE_STREAM_CLEANUP_ERROR = "Error closing stream pipe: %r"

    # Audio Player
    PLAYER_TRANSITION = "Player %s -> %s"
    PLAYER_ERROR = "Player error while playing '%s': %r"
    PLAYER_LISTENER_FAILED = "Player listener raised"
    PLAYER_SINK_STOP_FAILED = "Audio sink failed to stop: %r"
    PLAYER_STALE_END_IGNORED = "Ignoring end report for stale resource '%s'"

    # Voice Session
    VOICE_TRANSITION = "Voice session %s: %s -> %s"
    VOICE_STATE_AFTER_DESTROY = "Ignoring voice transition for destroyed session %s (to %s)"
    VOICE_LISTENER_FAILED = "Voice listener raised for guild %s"
    VOICE_CONNECT_FAILED = "Voice connect failed for guild %s"
    VOICE_REJOINING = "Rejoining voice in guild %s (attempt %d)"
    VOICE_REJOIN_FAILED = "Rejoin failed in guild %s: %r"
    VOICE_REJOIN_SCHEDULED = "Voice disconnected in guild %s, rejoining in %.1fs"
    VOICE_CHANNEL_MOVED = "Voice channel changed in guild %s"
    VOICE_CLEANUP_ERROR = "Error during voice cleanup: %r"
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_STALE_CLEANUP = "Found stale voice client in guild %s, cleaning up"
    VOICE_REMOVED = "Removed from voice in guild %s"
    VOICE_CONNECTION_LOST = "Voice connection lost in guild %s"

    # Resolution
    RESOLVED_ITEM = "Resolved '%s' (%s)"
    SEARCH_FAILED = "Search failed for '%s': %r"
    SEARCH_NO_URL = "No URL in yt-dlp entry %r"
    LOOKUP_FAILED = "Metadata lookup failed for %s: %r"
    COLLECTION_FAILED = "Collection expansion failed for %s: %r"
    CACHE_HIT = "Cache hit for '%s'"
    STREAM_SPAWNED = "Spawned stream process %s for %s"
    STREAM_PROBED = "Probed stream header %r as %s"

    # Queue
    QUEUE_ITEM_ADDED = "Queued '%s' in guild %s (%d ahead)"
    QUEUE_COLLECTION_ADDED = "Queued %d collection entries in guild %s"
    QUEUE_RESOLUTION_ABANDONED = "Dropping abandoned resolution of '%s' in guild %s"
    QUEUE_RESOLUTION_FAILED = "Could not resolve '%s': %s"
    QUEUE_RESOLUTION_CRASHED = "Unexpected error resolving '%s'"
    QUEUE_STOPPED = "Stopped guild %s: cleared %d items (force=%s)"
    QUEUE_SKIPPED = "Guild %s: skipped %d items"

    # Notices
    NOTICE_DELETE_FAILED = "Failed to delete notice: %r"
    NOTICE_SEND_FAILED = "Failed to send notice: %r"

    # Subscriptions
    SUBSCRIPTION_CREATED = "Created subscription for guild %s"
    SUBSCRIPTION_REMOVED = "Removed subscription for guild %s"
    SUBSCRIPTION_JOIN_FAILED = "Could not join voice in guild %s"
    SESSION_ENDING = "Ending voice session %s: %s (%s)"
    SESSION_TORN_DOWN = "Tore down subscription for guild %s"
    SHUTDOWN_ANNOUNCE_FAILED = "Failed to announce shutdown in guild %s: %r"
    SHUTDOWN_COMPLETE = "Shutdown complete: %d subscriptions closed"

    # Bot Lifecycle
    BOT_LOGGED_IN = "Logged in as %s (ID: %s)"
    BOT_CONNECTED_GUILDS = "Connected to %d guilds"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_TIMEOUT = "Shutdown broadcast timed out after %.1fs"
    BOT_SHUTDOWN_ERROR = "Error during shutdown broadcast"
    BOT_RECEIVED_SIGNAL = "Received signal %s, initiating graceful shutdown..."
    BOT_STARTING = "Starting Discord Music Queue Bot..."
    BOT_ENVIRONMENT = "Environment: %s"
    BOT_STOPPED_BY_USER = "Bot stopped by user"
    BOT_FATAL_ERROR = "Fatal error"
    EXTENSION_LOADED = "Loaded extension: %s"
    EXTENSION_LOAD_FAILED = "Failed to load extension %s"
    COMMANDS_SYNCED_GUILD = "Synced %d commands to guild %s"
    COMMANDS_SYNCED_GLOBAL = "Synced %d commands globally"
    COMMANDS_SYNC_FAILED = "Failed to sync commands"
    SLASH_COMMAND_ERROR = "Slash command %s failed: %r"
    CONTAINER_INITIALIZED = "Container initialized"
    CONTAINER_SHUTDOWN = "Container shut down"

    # Logging Setup
    LOGGING_CONFIG_NOT_FOUND = "Logging config not found at %s, using basic config"


class UserMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord interactions.
    Keep them concise, friendly, and include appropriate emoji.
    """

    # Queue
    ENQUEUED_NOW = "🎶 Playing **{title}**"
    ENQUEUED_AT = "➕ Queued **{title}** at position {position}"
    ENQUEUED_MANY = "➕ Queued {count} tracks"
    QUEUE_FULL = "❌ The queue is full ({limit} tracks)."
    COLLECTION_EMPTY = "❌ That playlist has no playable entries."
    QUEUE_EMPTY = "The queue is empty."
    QUEUE_TITLE = "Queue"
    QUEUE_NOW_PLAYING = "**Now playing:** {title}"
    QUEUE_ENTRY = "`{position}.` {title}"
    QUEUE_MORE = "...and {count} more"

    # Playback
    SKIPPED = "⏭️ Skipped {count} track(s)."
    STOPPED = "⏹️ Stopped playback and cleared {count} track(s)."
    PAUSED = "⏸️ Paused."
    RESUMED = "▶️ Resumed."
    LEFT = "👋 Left the voice channel."
    NOTHING_PLAYING = "Nothing is playing."
    NOTHING_TO_PAUSE = "Nothing is playing right now."
    NOTHING_TO_RESUME = "Playback is not paused."
    NOT_ACTIVE = "I'm not in a voice channel here."

    # Notices
    NOW_PLAYING_TITLE = "Now playing"
    PREVIOUSLY_PLAYED_TITLE = "Previously played"
    ITEM_ERROR = "❌ {error}"

    # Errors
    ERROR_NOT_IN_GUILD = "❌ This command only works in a server."
    ERROR_USER_NOT_IN_VOICE = "❌ Join a voice channel first."
    ERROR_COULD_NOT_JOIN_VOICE = "❌ I couldn't join your voice channel."
    ERROR_NOT_A_COLLECTION = "❌ That URL is not a playlist."
    ERROR_COMMAND_FAILED = "❌ Command failed. See logs."
