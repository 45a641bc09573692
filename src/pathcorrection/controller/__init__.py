"""Controllers and background workers that connect the model to the view."""
