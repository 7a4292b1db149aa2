"""OAuth App code exchange."""
