from setuptools import setup, find_packages
from os import path

here = path.abspath(path.dirname(__file__))

with open(path.join(here, 'README.md'),encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='opensearch-cluster-cdk',
    version='0.0.1',
    description='CDK app for deploying multi node OpenSearch and Elasticsearch clusters on EC2',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['test', 'test.*']),
    python_requires=">=3.8",
    install_requires=[
        'aws-cdk-lib>=2.100.0,<3',
        'constructs>=10.0.0,<11',
        'PyYAML>=6.0',
    ],
    extras_require={
        'aws' : ['boto3','botocore'],
        'test' : ['pytest','boto3','botocore'],
    }
)
