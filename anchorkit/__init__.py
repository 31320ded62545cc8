"""Table-driven state machines, fixed-layout logging and SONAR attribute and error types."""

__version__ = "0.1.0"
__all__ = ["fsm", "logs", "sonar_types"]