import os

import docker
from docker.errors import DockerException


def run_pytest_tests(file: str | os.PathLike, *args: str):
    """Runs pytest tests in the provided `file` with additional pytest `args`"""
    os.system(f'pytest "{os.path.abspath(file)}" -v {" ".join(args)}')


def is_docker_available() -> bool:
    """Checks if a Docker daemon can be reached with the environment's settings"""
    try:
        client = docker.from_env()
        try:
            return bool(client.ping())
        finally:
            client.close()
    except DockerException:
        return False
