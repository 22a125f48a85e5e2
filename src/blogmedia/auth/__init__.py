"""Administrator authentication guarding image uploads."""
