# SPDX-License-Identifier: AGPL-3.0-only
# (c) 2025

import json
import logging
from pathlib import Path

log = logging.getLogger(__name__)


class DeploymentError(Exception):
	pass


def find_artifact(name, artifacts_dir):
	candidates = sorted(
		p for p in Path(artifacts_dir).rglob(f'{name}.json')
		if not p.name.endswith('.dbg.json')
	)
	match candidates:
		case []:
			raise DeploymentError(f'No artifact found for contract {name!r} in {str(artifacts_dir)!r}.')
		case [path]:
			return path
		case _:
			raise DeploymentError(
				f'Multiple artifacts found for contract {name!r}: '
				+ ', '.join(str(p) for p in candidates)
			)


def load_artifact(name, artifacts_dir):
	path = find_artifact(name, artifacts_dir)
	log.debug('Loading artifact for %s from %s', name, path)
	try:
		with open(path, 'r') as f:
			artifact = json.load(f)
	except json.JSONDecodeError as e:
		raise DeploymentError(f'Artifact {str(path)!r} is not valid JSON: {e}') from e

	for key in ('abi', 'bytecode'):
		if key not in artifact:
			raise DeploymentError(f'Artifact {str(path)!r} has no {key!r} field.')
	# Interfaces and abstract contracts compile to empty bytecode.
	if artifact['bytecode'] in ('', '0x'):
		raise DeploymentError(f'Contract {name!r} has no bytecode and cannot be deployed.')
	return artifact


def get_contract_factory(w3, name, artifacts_dir):
	artifact = load_artifact(name, artifacts_dir)
	return w3.eth.contract(abi=artifact['abi'], bytecode=artifact['bytecode'])
