"""Domain layer: catalog, playlists and radio rotation."""
