"""Business services for attempts, ranking sessions and scoring."""
