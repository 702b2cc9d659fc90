"""Store secrets in the freedesktop.org Secret Service over D-Bus."""
