"""Domain layer: entities and errors shared by server and client code."""
