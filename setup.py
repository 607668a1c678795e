"""Setup file for the project."""

from setuptools import find_packages, setup

setup(
	name="applocker",
	version="1.0.0",
	description="Cross-process application locking with a messaging channel to the lock holder",
	packages=find_packages(include=["applocker", "applocker.*"]),
	python_requires=">=3.11",
	install_requires=[
		"platformdirs>=4.0",
		"pydantic>=2.7",
		"pydantic-settings>=2.3",
		"pyyaml>=6.0",
	],
	extras_require={"test": ["pytest>=8.0"]},
	entry_points={"console_scripts": ["applocker=applocker.__main__:main"]},
)
