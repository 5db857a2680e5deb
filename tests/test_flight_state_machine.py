import pytest

from bellerophon.config_keys import default_registry
from bellerophon.flight_state_machine import FlightState, FlightStateMachine, SensorReadings
from bellerophon.pyro_controller import PyroController


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakeSensors:
    def __init__(self):
        self.readings = SensorReadings()
        self.logged = 0

    def update(self):
        return self.readings

    def log_data(self):
        self.logged += 1


class FakeLogger:
    def __init__(self):
        self.events = []

    def log_event(self, message):
        self.events.append(message)


class FakeBuzzer:
    def __init__(self):
        self.pre_launch = 0
        self.landing = 0

    def pre_launch_tone(self):
        self.pre_launch += 1

    def landing_tone(self):
        self.landing += 1


@pytest.fixture
def rig():
    clock = FakeClock()
    sensors = FakeSensors()
    logger = FakeLogger()
    buzzer = FakeBuzzer()
    config = default_registry()
    drogue = PyroController(15, 5, clock=clock, hold_duration=2000)
    main = PyroController(7, 15, clock=clock, hold_duration=2000)
    fsm = FlightStateMachine(sensors, logger, buzzer, config, drogue, main, clock)
    return fsm, sensors, logger, buzzer, clock, config


def _fire(fsm, clock, target):
    for _ in range(10):
        clock.now += 1000
        if fsm.update() is target:
            return
    raise AssertionError("pyro never completed")


def test_starts_in_pre_launch(rig):
    fsm = rig[0]
    assert fsm.current_state() is FlightState.PRE_LAUNCH


def test_waits_on_pad_and_plays_tone(rig):
    fsm, sensors, logger, buzzer, _, _ = rig
    sensors.readings = SensorReadings(altitude=5, velocity=2)
    assert fsm.update() is FlightState.PRE_LAUNCH
    assert buzzer.pre_launch == 1
    assert logger.events == []


def test_debug_silences_pre_launch_tone(rig):
    fsm, sensors, _, buzzer, _, config = rig
    config.assign(config.name_to_key("DEBUG"), 1)
    fsm.update()
    assert buzzer.pre_launch == 0


def test_launch_by_velocity(rig):
    fsm, sensors, logger, _, _, _ = rig
    sensors.readings = SensorReadings(velocity=20)
    assert fsm.update() is FlightState.ASCENT
    assert logger.events == ["Launch detected for velocity = 20.00"]


def test_launch_by_altitude(rig):
    fsm, sensors, logger, _, _, _ = rig
    sensors.readings = SensorReadings(altitude=40, velocity=1)
    assert fsm.update() is FlightState.ASCENT
    assert logger.events[0].startswith("Launch detected for altitude = ")


def test_apogee_below_minimum_does_not_fire_drogue(rig):
    fsm, sensors, _, _, clock, _ = rig
    fsm.transition_to(FlightState.APOGEE)
    sensors.readings = SensorReadings(altitude=50, velocity=0, max_altitude=50)
    for _ in range(5):
        clock.now += 1000
        assert fsm.update() is FlightState.APOGEE
    assert not fsm.drogue.is_triggered()
    assert not fsm.drogue.has_ever_triggered()


def test_full_flight(rig):
    fsm, sensors, logger, buzzer, clock, _ = rig
    sensors.readings = SensorReadings(altitude=100, velocity=50, max_altitude=100)
    fsm.update()
    assert fsm.current_state() is FlightState.ASCENT

    sensors.readings = SensorReadings(altitude=500, velocity=0.2, max_altitude=500)
    assert fsm.update() is FlightState.APOGEE
    assert "APOGEE DETECTED = 500.00 METERS" in logger.events

    _fire(fsm, clock, FlightState.DESCENT_DROGUE)
    assert fsm.drogue.has_ever_triggered()
    assert "DROGUE DEPLOYED" in logger.events

    sensors.readings = SensorReadings(altitude=300, velocity=-20, max_altitude=500)
    assert fsm.update() is FlightState.DESCENT_DROGUE
    sensors.readings = SensorReadings(altitude=110, velocity=-20, max_altitude=500)
    assert fsm.update() is FlightState.LOW_ALTITUDE_DETECTION

    _fire(fsm, clock, FlightState.DESCENT_MAIN)
    assert fsm.main.has_ever_triggered()
    assert "MAIN DEPLOYED" in logger.events

    sensors.readings = SensorReadings(altitude=0, velocity=0, max_altitude=500)
    assert fsm.update() is FlightState.LANDING
    assert logger.events[-1] == "LANDING DETECTED"
    fsm.update()
    assert buzzer.landing == 1


def test_log_sensor_data_immediate(rig):
    fsm, sensors, _, _, _, _ = rig
    assert fsm.log_sensor_data() is True
    assert fsm.log_sensor_data(0) is True
    assert sensors.logged == 2


def test_log_sensor_data_with_delay(rig):
    fsm, sensors, _, _, clock, _ = rig
    assert fsm.log_sensor_data(500) is False
    clock.now = 499
    assert fsm.log_sensor_data(500) is False
    clock.now = 500
    assert fsm.log_sensor_data(500) is True
    assert fsm.log_sensor_data(500) is False
    assert sensors.logged == 1


def test_placeholder_states_stay_put(rig):
    fsm, sensors, logger, _, _, _ = rig
    sensors.readings = SensorReadings(velocity=100, altitude=1000)
    for state in (FlightState.STAGE_SEPARATION, FlightState.FAILURE):
        fsm.transition_to(state)
        assert fsm.update() is state
    assert logger.events == []