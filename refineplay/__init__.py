"""Playback of pre-authored multi-pass refinement narratives."""
