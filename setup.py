from setuptools import find_packages, setup

setup(
    name="jenkins-light",
    version="0.1.0",
    packages=find_packages(
        include=[
            "light_common",
            "light_common.*",
            "light_controller",
            "light_controller.*",
            "light_gpio",
            "light_gpio.*",
            "light_admin",
            "light_admin.*",
        ]
    ),
    install_requires=[
        "requests>=2.31.0",
        "click>=8.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-xdist>=3.3.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "light-controller=light_controller.__main__:main",
            "light-admin=light_admin.cli:main",
        ],
    },
    python_requires=">=3.10",
)
