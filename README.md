# bellerophon

The control logic of a small rocket flight computer as a plain Python
library with no third-party dependencies. Hardware stays at the edges:
pin outputs, servo drivers, the serial port, sensors, buzzer, LEDs and the
clock are objects you pass in, so the same code runs against real devices,
simulators or test doubles. Times are in milliseconds throughout.

## Modules

| Module | Contents |
| --- | --- |
| `bellerophon.constants` | `Mode` (operating modes), `NUM_MODES`, the serial protocol words, the framing characters `PREFIX` (`$`) and `SUFFIX` (`!`), file naming rules and pin numbers. |
| `bellerophon.config_keys` | `ConfigKey`, `ConfigRegistry` and `default_registry()`: the numbered configuration values with their defaults. |
| `bellerophon.pyro_controller` | `PyroController`: fires a pyro pin after a delay, holds it high for a fixed time, can be cancelled. |
| `bellerophon.file_manager` | `FileManager` and `FileManagerError`: numbered log and data files in a directory, an index file holding the counters, 32-bit float records at byte offsets. |
| `bellerophon.config_file_manager` | `ConfigFileManager` and `UnknownConfigKeyError`: the configuration stored as one float per key in `config.dat`. |
| `bellerophon.serial_communicator` | `SerialCommunicator`: framed messages over a port, read back one byte per call, waiting for an expected reply with a timeout. |
| `bellerophon.data_logger` | `DataLogger` and `crc32_of_file`: timestamped log events, CSV data rows, file transfer to a host with a CRC-32 checksum. |
| `bellerophon.positional_servo` | `PositionalServo` and `ServoChannel`: fin servos `A` to `D` moved relative to a centre, within 0–180 degrees and at most 30 degrees from centre. |
| `bellerophon.flight_state_machine` | `FlightState`, `SensorReadings`, `FlightStateMachine`: launch, apogee, drogue and main deployment, landing. |
| `bellerophon.serial_action` | `SerialAction` and `parse_servo_commands`: the ground-station commands. |

## Install

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Configuration

```python
from bellerophon.config_keys import default_registry

registry = default_registry()
print(len(registry))                          # 17 keys
print(registry.get("MAIN_DELAY"))             # 15.0
key = registry.name_to_key("SERVO_A_CENTER_POSITION")
registry.assign(key, 95.0)
registry.reset_to_defaults()
for line in registry.describe():
    print(line)
```

Unknown names or keys raise `KeyError`; `key_to_name` returns
`"UNKNOWN_KEY"` instead.

With a `FileManager` the values persist in `config.dat` inside the storage
directory, each at byte offset `key * 4`:

```python
from bellerophon.file_manager import FileManager
from bellerophon.config_file_manager import ConfigFileManager

files = FileManager("sdcard", False)
files.initialize()                 # creates the directory and index.dat
config = ConfigFileManager(files, registry)
config.initialize()                # writes defaults on first use, then loads
config.write_value_by_name("MAIN_DEPLOYMENT_ALT", 150.0)
print(config.get_value("MAIN_DEPLOYMENT_ALT"))
print(config.all_values())
config.restore_defaults()
```

## Files and logging

`FileManager.create_new_log_file()` and `create_new_data_file()` create
`log_000000.txt`, `data_000000.csv` and so on, with a `debug_` prefix when
the manager was built with `debug=True`; the counters live in `index.dat`.

`DataLogger(serial, files)` builds on it:

- `initialize()` creates a new log and data file and writes an opening line;
- `log_event(message)` appends `"<ms>: <message>"` to the log file;
- `add_data_file_heading(title)` writes a heading once per data file;
- `log_data(values, decimal_places=2)` appends a CSV row led by the time;
- `send_file(name)` sends `FILE_NAME:` and `CHECKSUM:` lines, skips the
  contents if the host answers `FILE_ALREADY_RECEIVED` within 100 ms,
  otherwise writes the raw bytes, `END_OF_TRANSMISSION`, and waits for
  `END_OF_TRANSMISSION_ACK`;
- `send_all_files()` and `delete_all_files()` act on every file except
  `index.dat` and `config.dat`.

## Serial protocol

`SerialCommunicator(port)` needs an object with `read(size)` returning
bytes (empty when nothing is waiting) and `write(data)`. Messages are framed
as `$<text>!`; `read_message()` consumes at most one byte per call and
returns the message when its suffix arrives, otherwise `""`. A body longer
than `buffer_size - 1` characters is dropped. `wait_for_message(expected,
timeout)` returns False on timeout or on `EXIT_PROGRAM`.

`SerialAction` carries out the commands:

- `check_serial_for_mode()`: `mode:<n>` sets `mode` to `Mode(n)`;
- `process_and_change_config()`: after `CHANGE_SETTINGS`, `KEY:VALUE` sets
  a value, `SETTINGS_INFO` lists the keys, `RESET_SETTINGS` restores the
  defaults;
- `move_servos_from_serial()`: after `MANUAL_CONTROL`, commands such as
  `A10 B-5` shift servo centres by the given degrees and store them;
- `serial_file_transfer()`: after `REQUEST_FILE_DOWNLOAD`, sends all files
  followed by `ALL_FILES_SENT` and waits for `ALL_FILES_SENT_ACK`;
- `purge_data_from_serial()`: after `PURGE_TIME`, deletes the log and data
  files.

Each waits up to three minutes for its confirming word; `EXIT_PROGRAM`
leaves any of them and returns to `Mode.STANDBY`.

## Flight state machine

```python
from bellerophon.flight_state_machine import FlightStateMachine, SensorReadings

class Sensors:
    def update(self):
        return SensorReadings(altitude=0.0, velocity=20.0)
    def log_data(self):
        pass

class Log:
    def log_event(self, message):
        print(message)

machine = FlightStateMachine(Sensors(), Log())
print(machine.update())   # FlightState.ASCENT
```

The machine leaves `PRE_LAUNCH` when velocity exceeds
`LAUNCH_VEL_THRESHOLD` or altitude exceeds `LAUNCH_ALTITUDE_THRESHOLD`,
detects apogee at a velocity of 0.5 m/s or less, fires the drogue once
`max_altitude` has reached `MINIMUM_APOGEE`, fires the main at or below
`MAIN_DEPLOYMENT_ALT`, and detects landing at 1 m/s or less.

## What it does not do

- It reads no sensors and does no sensor fusion: readings come from the
  object you pass as `sensors`.
- It opens no serial port and drives no pins, servos, buzzer or LEDs by
  itself; it calls the objects you provide (a `PositionalServo` without a
  driver only tracks angles).
- It has no command-line program and no main loop; the caller decides when
  to call `update()`, `check_serial_for_mode()` and the other methods.