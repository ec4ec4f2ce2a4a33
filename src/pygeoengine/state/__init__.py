"""State/store layer.

Each store here exclusively owns one slice of the console's view model
(drivers, alerts, persisted geofences, the polygon being edited) and is
only mutated through its own methods.
"""
