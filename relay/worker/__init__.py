"""Notification queue worker: change-feed listener, worker pool and process runner."""
