"""
Core package for the meeting minutes pipeline.

This package contains modular components used by the Flask service and the
command line client to decode uploaded audio, split it into transcription
sized WAV segments, run speech recognition chunk by chunk, and turn the
resulting transcript into structured meeting minutes.
"""
