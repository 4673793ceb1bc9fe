import pytest

from lunara import log


@pytest.mark.parametrize(
    "func, tag",
    [(log.info, "INFO"), (log.warn, "WARN"), (log.error, "ERROR")],
)
def test_tagged_line_on_stderr(capsys, func, tag):
    func("value=%d name=%s", 7, "relu0")
    captured = capsys.readouterr()
    assert captured.err == f"[{tag}] value=7 name=relu0\n"
    assert captured.out == ""


def test_plain_message_without_args(capsys):
    log.info("NVRTC log:")
    assert capsys.readouterr().err == "[INFO] NVRTC log:\n"


def test_bad_format_raises():
    with pytest.raises(TypeError):
        log.warn("%d", "not a number")