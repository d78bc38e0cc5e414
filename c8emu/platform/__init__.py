"""Host platform collaborators (pygame window, audio, input)."""
