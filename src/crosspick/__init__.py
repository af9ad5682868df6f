"""Cherry-pick merged pull requests onto branches of another repository."""
