#!/usr/bin/env python3
# ========================================================================== #
#                                                                            #
#    METAL-AGENT - The bare-metal host agent.                                #
#                                                                            #
#    Copyright (C) 2018-2024  Maxim Devaev <mdevaev@gmail.com>               #
#                                                                            #
#    This program is free software: you can redistribute it and/or modify    #
#    it under the terms of the GNU General Public License as published by    #
#    the Free Software Foundation, either version 3 of the License, or       #
#    (at your option) any later version.                                     #
#                                                                            #
#    This program is distributed in the hope that it will be useful,         #
#    but WITHOUT ANY WARRANTY; without even the implied warranty of          #
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the           #
#    GNU General Public License for more details.                            #
#                                                                            #
#    You should have received a copy of the GNU General Public License       #
#    along with this program.  If not, see <https://www.gnu.org/licenses/>.  #
#                                                                            #
# ========================================================================== #


from setuptools import setup


# =====
def main() -> None:
    setup(
        name="metal-agent",
        version="1.0",
        license="GPLv3",
        author="Maxim Devaev",
        author_email="mdevaev@gmail.com",
        description="The bare-metal host agent",
        platforms="any",

        packages=[
            "metalagent",
            "metalagent.validators",
            "metalagent.yamlconf",
            "metalagent.ipmi",
            "metalagent.clients",
            "metalagent.apps",
            "metalagent.apps.agent",
        ],

        install_requires=[
            "aiohttp",
            "pyghmi",
            "PyYAML",
            "pygments",
        ],

        extras_require={
            "test": [
                "pytest",
                "pytest-asyncio",
                "pytest-aiohttp",
            ],
        },

        entry_points={
            "console_scripts": [
                "metal-agent = metalagent.apps.agent:main",
            ],
        },

        classifiers=[
            "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
            "Development Status :: 4 - Beta",
            "Programming Language :: Python :: 3.12",
            "Topic :: System :: Systems Administration",
            "Operating System :: POSIX :: Linux",
            "Intended Audience :: System Administrators",
        ],
    )


if __name__ == "__main__":
    main()
