#!/usr/bin/env python
# -*- coding: utf-8 -*-

from mispclient import MISPClient
import argparse
import json


def get_parser():
    parser = argparse.ArgumentParser(description='Search tags on a MISP instance, or attach one to an event.')
    parser.add_argument("-s", "--search", help="Tag name to search, use %% for substrings matches.")
    parser.add_argument("-e", "--event", help="Event ID to tag.")
    parser.add_argument("-t", "--tag", type=int, help="Tag ID to attach to the event.")
    parser.add_argument("-l", "--local", action='store_true', help="Only tag locally, the tag is not synchronised.")
    return parser


if __name__ == '__main__':
    from keys import misp_url, misp_key, misp_verifycert, misp_client_cert

    parser = get_parser()
    args = parser.parse_args()

    misp = MISPClient(misp_url, misp_key, misp_verifycert, cert=misp_client_cert or None)

    if args.search:
        result = misp.search_tags(args.search)
    elif args.event and args.tag:
        result = misp.add_event_tag(args.event, args.tag, args.local)
    else:
        parser.error('Either --search or --event and --tag are required.')
    print(json.dumps(result.value))
