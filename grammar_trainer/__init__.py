"""Grammar Trainer backend: a multiplayer spaced-repetition grammar drill."""
