"""
Builder identifiers and driver tuning constants for dockersave.

Centralizes values shared between the post-processor, the default
driver and the CLI.
"""

from __future__ import annotations

# =============================================================================
# Builder Identifiers
# =============================================================================

# Identifier of this post-processor
BUILDER_ID = "packer.post-processor.docker-save"

# Upstream stages whose artifacts can be saved
DOCKER_IMPORT_BUILDER_ID = "packer.post-processor.docker-import"
DOCKER_TAG_BUILDER_ID = "packer.post-processor.docker-tag"

# =============================================================================
# Driver Defaults
# =============================================================================

# Executable used when docker_path is not configured
DEFAULT_DOCKER_EXECUTABLE = "docker"

# How often the driver checks a running `docker save` for cancellation
SAVE_POLL_INTERVAL_S = 0.25

# Grace period between terminate() and kill() on cancellation
SAVE_TERMINATE_TIMEOUT_S = 5.0

# Chunk size when copying piped stdout into a non-file sink
SAVE_COPY_CHUNK_BYTES = 1024 * 1024
