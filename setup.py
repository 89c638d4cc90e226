from setuptools import setup, find_packages

setup(
    name="sql-bulk",
    version="0.1.0",
    description="Batch statement synthesis for bulk SQL inserts and staged updates",
    packages=find_packages(include=["sql_bulk", "sql_bulk.*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        'click>=8.1.8',
        'polars>=1.27.1',
        'psycopg2-binary>=2.9.10',
        'rich>=13.9.4',
    ],
    extras_require={
        'test': [
            'pytest>=8.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'sql-bulk=sql_bulk.cli:main',
        ],
    },
)
