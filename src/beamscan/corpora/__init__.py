"""Content corpora: target boards and mock payloads."""
