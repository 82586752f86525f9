"""Static install data for the provisioner."""
