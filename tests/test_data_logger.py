import pytest

from bellerophon.constants import (
    END_OF_TRANSMISSION_ACK,
    END_OF_TRANSMISSION_MESSAGE,
    FILE_COPY_MESSAGE,
)
from bellerophon.data_logger import DataLogger, crc32_of_file
from bellerophon.file_manager import FileManager
from bellerophon.serial_communicator import SerialCommunicator


class HostPort:
    """Fake port that answers the logger the way a host script would."""

    def __init__(self, ack: bool = True, already_received: bool = False) -> None:
        self.incoming = bytearray()
        self.sent = bytearray()
        self.ack = ack
        self.already_received = already_received

    def read(self, size: int = 1) -> bytes:
        chunk = bytes(self.incoming[:size])
        del self.incoming[:size]
        return chunk

    def write(self, data: bytes) -> int:
        self.sent += data
        if data.startswith(b"CHECKSUM:") and self.already_received:
            self.incoming += f"${FILE_COPY_MESSAGE}!".encode()
        if data == (END_OF_TRANSMISSION_MESSAGE + "\r\n").encode() and self.ack:
            self.incoming += f"${END_OF_TRANSMISSION_ACK}!".encode()
        return len(data)


def make_logger(tmp_path, port=None, debug=False):
    port = port if port is not None else HostPort()
    ticks = iter(range(10**9))
    comm = SerialCommunicator(port, clock=lambda: float(next(ticks)))
    files = FileManager(tmp_path, debug=debug)
    files.initialize()
    logger = DataLogger(comm, files, clock=lambda: 1234.0)
    return logger, files, port


def test_initialize_creates_files_and_logs_start(tmp_path):
    logger, files, _ = make_logger(tmp_path)
    logger.initialize()
    assert files.log_file_name == "log_000000.txt"
    assert files.data_file_name == "data_000000.csv"
    assert (tmp_path / files.log_file_name).read_text() == "1234: Start LOG FILE\n"
    assert (tmp_path / files.data_file_name).exists()


def test_initialize_in_debug_mode(tmp_path):
    logger, files, _ = make_logger(tmp_path, debug=True)
    logger.initialize()
    assert files.log_file_name.startswith("debug_")
    text = (tmp_path / files.log_file_name).read_text()
    assert text == "1234: Warning! DEBUG Enabled.\n\n"


def test_log_event_appends_lines(tmp_path):
    logger, files, _ = make_logger(tmp_path)
    logger.initialize()
    logger.log_event("DROGUE DEPLOYED")
    lines = (tmp_path / files.log_file_name).read_text().splitlines()
    assert lines[-1] == "1234: DROGUE DEPLOYED"
    assert len(lines) == 2


def test_log_event_truncates_to_buffer(tmp_path):
    logger, files, _ = make_logger(tmp_path)
    files.create_new_log_file()
    logger.log_event("x" * 500)
    text = (tmp_path / files.log_file_name).read_text()
    assert len(text) == 99
    assert text.startswith("1234: x")


def test_log_data_formats_row(tmp_path):
    logger, files, _ = make_logger(tmp_path)
    files.create_new_data_file()
    logger.log_data([1.0, 2.5], 2)
    assert (tmp_path / files.data_file_name).read_text() == "1234,1.00,2.50\n"


def test_log_data_without_values_writes_timestamp_only(tmp_path):
    logger, files, _ = make_logger(tmp_path)
    files.create_new_data_file()
    logger.log_data([])
    assert (tmp_path / files.data_file_name).read_text() == "1234\n"


def test_log_data_decimal_places_are_clamped(tmp_path):
    logger, files, _ = make_logger(tmp_path)
    files.create_new_data_file()
    logger.log_data([0.5], 10)
    logger.log_data([0.5], 12)
    first, second = (tmp_path / files.data_file_name).read_text().splitlines()
    assert first == second


def test_heading_written_once_and_again_after_delete(tmp_path):
    logger, files, _ = make_logger(tmp_path)
    files.create_new_data_file()
    logger.add_data_file_heading("time,alt")
    logger.add_data_file_heading("time,alt")
    path = tmp_path / files.data_file_name
    assert path.read_text() == "time,alt\n"
    path.unlink()
    logger.add_data_file_heading("time,alt")
    assert path.read_text() == "time,alt\n"


def test_crc32_of_file_check_value(tmp_path):
    path = tmp_path / "check.bin"
    path.write_bytes(b"123456789")
    assert crc32_of_file(path) == 0xCBF43926


def test_send_file_missing(tmp_path):
    logger, _, port = make_logger(tmp_path)
    assert logger.send_file("nope.csv") is False
    assert bytes(port.sent) == b"Data file not found.\r\n"


def test_send_file_with_acknowledgement(tmp_path):
    logger, _, port = make_logger(tmp_path)
    (tmp_path / "data.csv").write_bytes(b"a,b\n1,2\n")
    assert logger.send_file("data.csv") is True
    sent = bytes(port.sent)
    checksum = crc32_of_file(tmp_path / "data.csv")
    assert b"FILE_NAME:data.csv\r\n" in sent
    assert f"CHECKSUM:{checksum}\r\n".encode() in sent
    assert b"a,b\n1,2\n" + END_OF_TRANSMISSION_MESSAGE.encode() in sent


def test_send_file_skipped_when_host_has_it(tmp_path):
    port = HostPort(already_received=True)
    logger, _, port = make_logger(tmp_path, port=port)
    (tmp_path / "data.csv").write_bytes(b"payload-bytes")
    assert logger.send_file("data.csv") is False
    assert b"payload-bytes" not in bytes(port.sent)
    assert END_OF_TRANSMISSION_MESSAGE.encode() not in bytes(port.sent)


def test_send_file_without_acknowledgement(tmp_path):
    logger, _, port = make_logger(tmp_path, port=HostPort(ack=False))
    (tmp_path / "data.csv").write_bytes(b"payload-bytes")
    assert logger.send_file("data.csv") is False
    assert b"payload-bytes" in bytes(port.sent)


def test_send_all_files_skips_index_and_config(tmp_path):
    logger, files, port = make_logger(tmp_path)
    logger.initialize()
    files.create_file(files.config_file_name)
    sent_names = logger.send_all_files()
    assert sorted(sent_names) == sorted([files.log_file_name, files.data_file_name])
    assert b"FILE_NAME:config.dat" not in bytes(port.sent)
    assert b"FILE_NAME:index.dat" not in bytes(port.sent)


def test_delete_all_files_keeps_index_and_config(tmp_path):
    logger, files, port = make_logger(tmp_path)
    logger.initialize()
    files.create_file(files.config_file_name)
    deleted = logger.delete_all_files()
    assert len(deleted) == 2
    assert files.file_names == sorted([files.config_file_name, files.index_file_name])
    assert b"All files deleted.\r\n" in bytes(port.sent)


@pytest.mark.parametrize("count", [0, 3])
def test_delete_all_files_removes_every_user_file(tmp_path, count):
    logger, files, _ = make_logger(tmp_path)
    for number in range(count):
        files.create_file(f"extra_{number}.txt")
    deleted = logger.delete_all_files()
    assert len(deleted) == count
    assert all(not files.file_exists(name) for name in deleted)