import pytest

SIMPLE_LINE = '2024-01-15 10:30:45 GET /home 200 120ms "Mozilla/5.0"'
APACHE_LINE = '10.0.0.1 - - [15/Jan/2024:10:30:45 -0300] "GET /home HTTP/1.1" 200 2326'


@pytest.fixture
def write_log(tmp_path):
    """Write lines to a log file under tmp_path and return its path."""
    def _write(name, lines):
        path = tmp_path / name
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return path
    return _write
