"""Fixed values shared across the flight computer: modes, serial protocol and pins."""

from enum import IntEnum


class Mode(IntEnum):
    """Operating modes selectable over the serial link."""

    STANDBY = 0
    READING = 1
    PURGE = 2
    LOGGING = 3
    FIN_CONTROL = 4
    CONFIG = 5


NUM_MODES = len(Mode)

# Serial messaging
HANDSHAKE_MESSAGE = "START_TRANSFER"
ACK_MESSAGE = "TRANSFER_ACK"
END_OF_TRANSMISSION_MESSAGE = "END_OF_TRANSMISSION"
END_OF_TRANSMISSION_ACK = "END_OF_TRANSMISSION_ACK"
FILE_COPY_MESSAGE = "FILE_ALREADY_RECEIVED"
ALL_FILES_SENT = "ALL_FILES_SENT"
ALL_FILES_SENT_ACK = "ALL_FILES_SENT_ACK"
REQUEST_FILE_DOWNLOAD = "REQUEST_FILE_DOWNLOAD"
CHANGE_SETTINGS_MESSAGE = "CHANGE_SETTINGS"
MANUAL_SERVO_CONTROL_MESSAGE = "MANUAL_CONTROL"
CANCEL_MSG_REQUEST = "EXIT_PROGRAM"
REQUEST_SETTINGS_INFO_MESSAGE = "SETTINGS_INFO"
DELETE_FILE_MESSAGE = "PURGE_TIME"
RESET_CONFIG_MESSAGE = "RESET_SETTINGS"

# Serial message framing: prefix and suffix must differ and must not be NUL.
PREFIX = "$"
SUFFIX = "!"
BAUD_RATE = 115200

# Standard deviation of the model (model error)
SIGMA_M = 10
# Standard deviations of altitude and acceleration measurements
SIGMA_S = 3
SIGMA_A = 2

# File naming
LOG_FILE_PREFIX = "log_"
LOG_FILE_SUFFIX = ".txt"
DATA_FILE_PREFIX = "data_"
DATA_FILE_SUFFIX = ".csv"
DEBUG_PREFIX = "debug_"
# Number of digits in file counters, e.g. 6 gives log_000000.txt
ZERO_PADDING = 6

# Flash memory
CHIP_SELECT = 10

# Pyro MOSFET pins (pyro 3 and 4 share pins with servos C and D)
PYRO_DROGUE = 15
PYRO_MAIN = 7

# External UART
TX = 20
RX = 21

# Buzzer
BUZZER = 22

# LEDs
B_LED = 2
G_LED = 1
R_LED = 0
PRESSURE_LED = 14
IMU_LED = 6
FLASH_LED = 9

# Servo pins
SERVO_PIN_A = 3
SERVO_PIN_B = 4
SERVO_PIN_C = 5
SERVO_PIN_D = 8