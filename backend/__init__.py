"""Spotify <-> Apple Music / Apple Podcasts link conversion service."""
