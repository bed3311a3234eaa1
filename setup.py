"""Install the postauth accounts service."""

from setuptools import setup, find_packages

setup(
    name='postauth',
    version='0.1.0',
    packages=find_packages(include=['postauth', 'postauth.*'],
                           exclude=['*.tests', '*.tests.*']),
    install_requires=[
        "flask",
        "flask-sqlalchemy",
        "sqlalchemy",
        "redis",
        "fakeredis",
        "python-dateutil",
        "pytz",
    ],
    extras_require={
        'test': [
            "pytest",
            "hypothesis",
            "mimesis",
        ]
    },
    zip_safe=False
)
