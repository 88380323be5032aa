from setuptools import setup, find_packages

setup(
    name="murmur-dictation",
    version="0.1.0",
    description="Local dictation: microphone capture, whisper.cpp transcription and llama.cpp cleanup",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyaudio>=0.2.11",
        "numpy>=1.21.0",
        "pywhispercpp>=1.2.0",
        "llama-cpp-python>=0.3.0",
        "aiohttp>=3.8.0",
        "platformdirs>=3.0.0",
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "murmur=murmur.main:main",
        ],
    },
)
