"""chronolog: personal time tracking with a reward roulette."""
