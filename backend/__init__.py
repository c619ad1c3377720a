"""Backend — REST API for the skill record store."""
