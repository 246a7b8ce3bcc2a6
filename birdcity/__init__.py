"""
Bird City
=========

Daily city-building puzzle. Every player gets the same board and the same
tile sequence for a given day; the game is scored by how large each
colour's largest connected district grows.

All tunable parameters are in game_config.yaml.
"""
