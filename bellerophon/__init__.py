"""Model rocket flight computer logic: configuration, file logging, pyro and servo control, flight states and serial commands."""

__version__ = "0.1.0"

__all__ = [
    "config_file_manager",
    "config_keys",
    "constants",
    "data_logger",
    "file_manager",
    "flight_state_machine",
    "positional_servo",
    "pyro_controller",
    "serial_action",
    "serial_communicator",
]