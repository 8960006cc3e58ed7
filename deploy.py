# SPDX-License-Identifier: AGPL-3.0-only
# (c) 2025

import argparse
import json
import logging
import sys

from web3 import Web3

from artifacts import DeploymentError, get_contract_factory

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120

# The marketplace constructor takes this as its second argument.
MARKETPLACE_PARAM = 1


def setup_logging(verbose=False):
	logging.basicConfig(
		level=logging.DEBUG if verbose else logging.INFO,
		format='%(asctime)s | %(levelname)-8s | %(message)s',
		datefmt='%H:%M:%S',
	)


def connect(host, port, account_index):
	w3 = Web3(Web3.HTTPProvider(f'http://{host}:{port}'))
	if not w3.is_connected():
		raise DeploymentError(f'Could not connect to node at http://{host}:{port}.')
	select_account(w3, account_index)
	return w3


def select_account(w3, account_index):
	accounts = w3.eth.accounts
	if not 0 <= account_index < len(accounts):
		raise DeploymentError(f'Account index {account_index} is out of range (the node has {len(accounts)} accounts).')
	w3.eth.default_account = accounts[account_index]
	log.debug('Using account %s', w3.eth.default_account)


def deploy_contract(w3, factory, *args, timeout=DEFAULT_TIMEOUT):
	tx_hash = factory.constructor(*args).transact()
	log.debug('Sent deployment transaction %s', Web3.to_hex(tx_hash))

	receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
	if receipt.status != 1:
		raise DeploymentError(f'Deployment transaction {Web3.to_hex(tx_hash)} reverted.')
	if receipt.contractAddress is None:
		raise DeploymentError(f'Deployment transaction {Web3.to_hex(tx_hash)} created no contract.')
	log.debug('Deployed at %s (gas used: %s)', receipt.contractAddress, receipt.gasUsed)
	return receipt.contractAddress


def run(w3, artifacts_dir, timeout=DEFAULT_TIMEOUT):
	deployments = {}

	erc4907 = get_contract_factory(w3, 'ERC4907', artifacts_dir)
	deployments['ERC4907'] = deploy_contract(w3, erc4907, timeout=timeout)
	print(f'4907 Contract Address: {deployments["ERC4907"]}')

	marketplace = get_contract_factory(w3, 'NFTMarketPlace', artifacts_dir)
	deployments['NFTMarketPlace'] = deploy_contract(
		w3, marketplace, deployments['ERC4907'], MARKETPLACE_PARAM, timeout=timeout
	)
	print(f'NFTMarketPlace Contract Address: {deployments["NFTMarketPlace"]}')

	return deployments


def main(argv=None):
	parser0 = argparse.ArgumentParser(allow_abbrev=False, description='Deploy the ERC4907 and NFTMarketPlace contracts.')

	parser0.add_argument('--host', default='localhost', metavar='ADDRESS', help='The host to connect to. Default: %(default)s')
	parser0.add_argument('--port', type=int, default=8545, metavar='NUMBER', help='The port number to use. Default: %(default)s')
	parser0.add_argument('--account-index', type=int, default=0, metavar='NUMBER', help='The index of the account to deploy from. Default: %(default)s')
	parser0.add_argument('--artifacts-dir', default='artifacts', metavar='PATH', help='The directory holding the compiled contract artifacts. Default: %(default)s')
	parser0.add_argument('--timeout', type=float, default=DEFAULT_TIMEOUT, metavar='SECONDS', help='How long to wait for each deployment to be mined. Default: %(default)s')
	parser0.add_argument('--deployments-file', metavar='PATH', help='Write the deployed addresses as JSON to the file at %(metavar)s.')
	parser0.add_argument('-v', '--verbose', action='store_true', help='Log debug output and show tracebacks on failure.')

	args0 = parser0.parse_args(argv)
	setup_logging(args0.verbose)

	deployments = {}
	try:
		w3 = connect(args0.host, args0.port, args0.account_index)
		deployments = run(w3, args0.artifacts_dir, timeout=args0.timeout)
		if args0.deployments_file is not None:
			with open(args0.deployments_file, 'w') as f:
				json.dump(deployments, f, indent='\t')
			log.info('Wrote deployed addresses to %s', args0.deployments_file)
	except Exception as e:
		log.error(f'Deployment failed: {e}')
		if deployments:
			log.error(f'Deployed addresses: {json.dumps(deployments)}')
		if args0.verbose:
			raise
		return 1
	return 0


if __name__ == '__main__':
	sys.exit(main())
