from setuptools import setup, find_packages

setup(
    name="boxmenu",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    description="Keyboard- and mouse-driven boxed list menus for the terminal.",
    author="Max Carlson",
    author_email="carlsonamax@gmail.com",
    python_requires=">=3.9",
    install_requires=[
        "rich",
        "tomli; python_version < '3.11'",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "boxmenu=boxmenu.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
        "Environment :: Console",
    ],
)
