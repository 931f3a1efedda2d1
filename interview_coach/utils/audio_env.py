"""
Keeps native audio libraries (ALSA/JACK via PortAudio) quiet on stderr.
"""
import os
import functools

os.environ.setdefault("JACK_NO_START_SERVER", "1")


def with_suppressed_audio_warnings(func):
    """
    Run func with file descriptor 2 pointed at /dev/null.

    PortAudio probes every ALSA plugin when a PyAudio instance is created and
    prints a wall of warnings that would otherwise drown the CLI output.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            original_stderr_fd = os.dup(2)
            null_fd = os.open(os.devnull, os.O_WRONLY)
            os.dup2(null_fd, 2)
            os.close(null_fd)
        except OSError:
            original_stderr_fd = None

        try:
            return func(*args, **kwargs)
        finally:
            if original_stderr_fd is not None:
                os.dup2(original_stderr_fd, 2)
                os.close(original_stderr_fd)

    return wrapper
