"""Client for the Event Planner REST service."""
