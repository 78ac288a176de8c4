import asyncio
import os
import signal
import time
from dataclasses import dataclass
from typing import List, Optional

from judge.exception import JudgeError


class SandboxError(JudgeError):
    """Raised when the sandbox itself cannot do its job."""


@dataclass
class Result:
    # "Exited Normally", "TLE", "OLE" or "RE"
    Status: str
    Duration: int  # ms
    MemUsage: int  # not measured, always 0
    Stdout: str
    Stderr: str
    ExitMsg: str
    ExitCode: Optional[int]


class Sandbox:
    """
    Run one program as a child process with stdin piped in and a wall-clock
    limit. The whole process group is SIGKILLed on timeout or when stdout
    grows beyond `output_limit` bytes.
    """

    def __init__(
        self,
        command: List[str],
        cwd: str,
        time_limit: int,  # ms
        stdin: str = '',
        output_limit: int = 1024 * 1024,  # bytes
    ):
        if not command:
            raise SandboxError('empty command')
        if time_limit <= 0:
            raise SandboxError(f'invalid time limit: {time_limit}')
        self.command = command
        self.cwd = cwd
        self.time_limit = time_limit
        self.stdin = stdin or ''
        self.output_limit = output_limit
        self.output_exceeded = False

    async def run(self) -> Result:
        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command,
                cwd=self.cwd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            # missing interpreter/toolchain, bad permissions ...
            return Result(
                Status='RE',
                Duration=self._elapsed(start),
                MemUsage=0,
                Stdout='',
                Stderr=str(e),
                ExitMsg=f'failed to start {self.command[0]}',
                ExitCode=None,
            )
        stdout = bytearray()
        stderr = bytearray()
        timed_out = False
        try:
            await asyncio.wait_for(
                asyncio.gather(
                    self._feed(proc),
                    self._drain(proc, proc.stdout, stdout, kill=True),
                    self._drain(proc, proc.stderr, stderr, kill=False),
                    proc.wait(),
                ),
                timeout=self.time_limit / 1000,
            )
        except asyncio.TimeoutError:
            timed_out = True
            self._kill(proc)
            await proc.wait()
        duration = self._elapsed(start)
        exit_code = proc.returncode
        if timed_out or duration > self.time_limit:
            status, exit_msg = 'TLE', 'Time Limit Exceeded'
        elif self.output_exceeded:
            status, exit_msg = 'OLE', 'Output limit exceeded'
        elif exit_code != 0:
            status, exit_msg = 'RE', self._describe_exit(exit_code)
        else:
            status, exit_msg = 'Exited Normally', ''
        return Result(
            Status=status,
            Duration=duration,
            MemUsage=0,
            Stdout=stdout.decode('utf-8', 'replace'),
            Stderr=stderr.decode('utf-8', 'replace'),
            ExitMsg=exit_msg,
            ExitCode=exit_code,
        )

    async def _feed(self, proc):
        try:
            if self.stdin:
                proc.stdin.write(self.stdin.encode('utf-8'))
                await proc.stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # the program exited without reading all of its input
            pass
        finally:
            proc.stdin.close()

    async def _drain(self, proc, stream, buf: bytearray, kill: bool):
        while True:
            chunk = await stream.read(64 * 1024)
            if not chunk:
                return
            if len(buf) < self.output_limit:
                buf.extend(chunk[:self.output_limit - len(buf) + 1])
            if len(buf) > self.output_limit and kill:
                self.output_exceeded = True
                self._kill(proc)
                return

    @staticmethod
    def _kill(proc):
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        except PermissionError:
            proc.kill()

    @staticmethod
    def _elapsed(start: float) -> int:
        return int((time.monotonic() - start) * 1000)

    @staticmethod
    def _describe_exit(exit_code: int) -> str:
        if exit_code < 0:
            try:
                return f'Killed by signal {signal.Signals(-exit_code).name}'
            except ValueError:
                return f'Killed by signal {-exit_code}'
        return f'Exited with code {exit_code}'
