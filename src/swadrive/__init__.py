"""SwaDrive task-marketplace backend."""
