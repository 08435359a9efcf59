"""Basic zkatom examples."""
