"""
Application services layer (use cases).

Pure reconciliation engine:
- release_clock, episode_sets, show_lifecycle: primitives
- tv_progress: progress snapshot, status resolution, completion builder
- sanitizer, reconciler: normalization, deduplication, sync diff

Use cases built on top of it:
- library: user actions on the library
- cloud_sync: debounced synchronization with the remote store
- metadata_refresh: TMDB refresh of tracked shows
- importer: JSON import/export

Services depend on ports (interfaces) from core/ for storage and metadata.
"""
