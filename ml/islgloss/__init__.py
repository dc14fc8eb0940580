"""
ISL gloss translation and sign playback.

Subpackages:
    translator  English text -> ordered ISL gloss sequence
    player      Motion clip loading, frame clock, fingerspelling, sentence scheduler
"""
