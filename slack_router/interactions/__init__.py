"""Interactive requests: block actions, shortcuts, view submissions."""
