"""Domain services: scoring engines, inventory, gap pipeline, snapshot store."""
